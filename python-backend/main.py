from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
import os
from dotenv import load_dotenv
from policy_engine.logging_config import configure_logging
from routes.policy import router as policy_router

load_dotenv()
configure_logging()

app = FastAPI(title="Policy Clause Selection and Diff API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(policy_router)

@app.get("/")
async def root():
    return {"message": "Policy Clause Selection and Diff API", "status": "running"}

@app.head("/")
async def root_head():
    return Response(status_code=200)

@app.get("/health")
async def health():
    return {"status": "healthy", "service": "policy-engine"}

@app.head("/health")
async def health_head():
    return Response(status_code=200)

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
