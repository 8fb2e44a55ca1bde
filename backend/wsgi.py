# Overview: WSGI entry point used by the flask CLI and production servers.

from mams import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("APP_ENV") != "production")
