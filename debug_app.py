# debug_app.py
import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adminportal.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=8000,
        reload=False,   # single process
        log_level="debug",
    )
