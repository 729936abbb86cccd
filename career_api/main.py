import uvicorn

from career_api.config import get_settings
from career_api.index import create_app

app = create_app()


def run():
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
