import os

from menuscan import create_app
from menuscan.config.settings import config

# Create the Flask application
app = create_app(config[os.getenv("FLASK_ENV", "default")])

if __name__ == "__main__":
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=False, use_reloader=False)
