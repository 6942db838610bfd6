import uvicorn

from trophycase.config import PORT

if __name__ == "__main__":
  uvicorn.run("trophycase.main:app", host="0.0.0.0", port=PORT)
