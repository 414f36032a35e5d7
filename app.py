from dotenv import load_dotenv

from partfinder.app import create_app
from partfinder.settings import Settings

# Load environment variables
load_dotenv()

settings = Settings.from_env()
app = create_app(settings)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
