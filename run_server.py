import uvicorn

if __name__ == "__main__":
    # SCREENTIME_MANUSCRIPT=export.json selects a manuscript; the sample is used otherwise

    print("Starting Screen-Time API Server...")
    print("Docs available at: http://localhost:8000/docs")

    uvicorn.run(
        "screentime.api.server:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True
    )
