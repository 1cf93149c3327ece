from flask import Blueprint, request

from library_app.services.chat_service import ChatService
from library_app.utils.responses import json_ok

chat_bp = Blueprint("chat", __name__)

_chat = ChatService()


@chat_bp.post("/")
def chat():
    data = request.get_json(silent=True) or {}
    response = _chat.generate_response(str(data.get("message") or ""))
    return json_ok({"response": response})
