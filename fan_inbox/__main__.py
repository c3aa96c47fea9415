"""
Run the API with uvicorn: python -m fan_inbox
"""
import os

import uvicorn


def run_server():
    """Run the web server"""
    uvicorn.run(
        "fan_inbox.main:app",
        host=os.environ.get("INBOX_HOST", "127.0.0.1"),
        port=int(os.environ.get("INBOX_PORT", "8000")),
        log_level="info",
    )


if __name__ == '__main__':
    run_server()
