from __future__ import annotations

import os

from fastapi import FastAPI, Request

NUMBER = os.getenv("NUMBER", "0")

app = FastAPI(title=f"Dummy Server {NUMBER}")


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])
async def echo(path: str, request: Request) -> dict[str, str]:
    # Tells the caller which instance answered; useful to watch random selection.
    body = await request.body()
    return {
        "server": NUMBER,
        "method": request.method,
        "path": f"/{path}",
        "host": request.headers.get("host", ""),
        "body": body.decode("utf-8", errors="replace"),
    }
