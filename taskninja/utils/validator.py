class Validator:
    """Collects one error message per field.

    The first failing check for a field wins; later checks against a field that
    already has an error are ignored.
    """

    def __init__(self):
        self.errors = {}

    def valid(self):
        return not self.errors

    def add_error(self, field, message):
        self.errors.setdefault(field, message)

    def check(self, ok, field, message):
        if not ok:
            self.add_error(field, message)
