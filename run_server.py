import os

import uvicorn

if __name__ == "__main__":
    host = os.environ.get("TRILENS_HOST", "0.0.0.0")
    port = int(os.environ.get("TRILENS_PORT", "8000"))

    print("Starting Trilens Narrative API Server...")
    print(f"Docs available at: http://localhost:{port}/docs")

    uvicorn.run(
        "trilens.api.server:app",
        host=host,
        port=port,
        reload=os.environ.get("TRILENS_RELOAD", "0") == "1"
    )
