from __future__ import annotations

import os

import uvicorn

from smartplan.app import app

if __name__ == "__main__":
  uvicorn.run(app,
              host=os.getenv("HOST", "127.0.0.1"),
              port=int(os.getenv("PORT", "8000")))
