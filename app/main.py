import logging

import uvicorn
from fastapi import FastAPI, HTTPException

from app.config import Settings
from app.orchestrator import ConversationOrchestrator, SessionStore, greeting
from app.schemas import ChatRequest, ChatResponse, SessionResponse

APP_NAME = "Symptom Assistant"

settings = Settings.from_env()

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# NOTE: no auth or rate limiting in front of this; sessions live in process memory only.
app = FastAPI(title=APP_NAME)

orchestrator = ConversationOrchestrator(settings)
sessions = SessionStore(orchestrator, max_sessions=settings.max_sessions)

for issue in settings.configuration_issues():
    logger.warning("%s; fallback answers will be used", issue)


# ---------
# Routes
# ---------
@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.get("/config")
async def config_status():
    issues = settings.configuration_issues()
    return {"is_valid": not issues, "issues": issues}


@app.post("/sessions", response_model=SessionResponse)
def start_session():
    session = sessions.create()
    return SessionResponse(session_id=session.session_id, turns=list(session.turns))


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return SessionResponse(session_id=session.session_id, turns=list(session.turns))


@app.delete("/sessions/{session_id}", status_code=204)
def end_session(session_id: str):
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail="session not found")


@app.get("/greeting")
async def get_greeting():
    return {"content": greeting()}


# Sync handler: runs in the threadpool since the outbound calls block.
@app.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest):
    text = req.message.strip()
    if not text:
        raise HTTPException(status_code=422, detail="message must not be blank")

    if req.session_id:
        session = sessions.get(req.session_id)
        if session is None:
            raise HTTPException(status_code=404, detail="session not found")
    else:
        session = sessions.create()

    reply, result = session.send(text)
    return ChatResponse(
        session_id=session.session_id,
        reply=reply.content,
        small_talk=result is None,
        result=result,
    )


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
