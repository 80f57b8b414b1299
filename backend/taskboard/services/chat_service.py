"""Team chat persistence. Messages are stored before they are broadcast and never edited."""

from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from taskboard.config import settings
from taskboard.models.team import ChatMessage
from taskboard.utils.helpers import normalize_email
from taskboard.utils.permissions import get_team_or_404, is_team_member


def post_message(db: Session, team_id: int, sender_email: str, message: Optional[str]) -> ChatMessage:
    sender_email = normalize_email(sender_email)
    text = (message or "").strip()
    if not sender_email:
        raise HTTPException(status_code=400, detail="Sender email is required")
    if not text:
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    get_team_or_404(db, team_id)
    if not is_team_member(db, team_id, sender_email):
        raise HTTPException(status_code=403, detail="You are not a member of this team")

    chat = ChatMessage(team_id=team_id, sender_email=sender_email, message=text)
    db.add(chat)
    db.commit()
    db.refresh(chat)
    return chat


def list_messages(db: Session, team_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
    recent = (
        db.query(ChatMessage)
        .filter(ChatMessage.team_id == team_id)
        .order_by(ChatMessage.sent_at.desc(), ChatMessage.id.desc())
        .limit(limit or settings.CHAT_HISTORY_LIMIT)
        .all()
    )
    return list(reversed(recent))


def to_event(chat: ChatMessage) -> dict:
    """Payload of the ``new_message`` broadcast; clients append it as-is."""
    return {
        "id": chat.id,
        "team_id": chat.team_id,
        "sender_email": chat.sender_email,
        "message": chat.message,
        "sent_at": chat.sent_at.isoformat() if chat.sent_at else None,
    }
