import os

from mylo_api.factory import create_app

app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("APP_PORT", app.config["APP_PORT"]))
    app.logger.info(f"Starting server on :{port}")
    app.run(host="0.0.0.0", port=port, threaded=True)
