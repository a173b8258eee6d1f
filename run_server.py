import os

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", "8000"))

    print("Starting Cultural Profile Engine API...")
    print(f"Docs available at: http://localhost:{port}/docs")

    uvicorn.run(
        "profile_engine.api.server:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get("RELOAD", "0") == "1",
    )
