from dotenv import load_dotenv
import os

# Load environment variables from .env file
load_dotenv()

from flashquest_app import create_app

app = create_app()

if __name__ == '__main__':
    app.run(
        host=os.environ.get('FLASK_RUN_HOST', '0.0.0.0'),
        port=int(os.environ.get('FLASK_RUN_PORT', 5000)),
        debug=os.environ.get('FLASK_DEBUG', '1') == '1',
    )
