import os

from fitchallenge import create_app
from fitchallenge.extensions import db

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        db.create_all()

    app.run(debug=app.config.get('DEBUG', False), port=int(os.getenv('PORT', 3000)))
