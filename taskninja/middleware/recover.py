from taskninja.utils.responses import server_error_response


def recover(err):
    # The connection may be left half-written; ask the server to drop it
    return server_error_response(err, headers={"Connection": "close"})


def init_app(app):
    # HTTPException subclasses keep their own handler; everything else lands here
    app.register_error_handler(Exception, recover)
