# wsgi.py
# WSGI entrypoint for Gunicorn.
#
# Gunicorn start command:
#   gunicorn wsgi:app -b 0.0.0.0:$PORT -w 2 -k gthread
#
# Local development:
#   python wsgi.py
#   flask --app wsgi init-db --drop

from sitecms import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["PORT"])
