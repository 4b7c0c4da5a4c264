import logging

from sigaapp.core.exceptions import SessionError
from sigaapp.services.api_client import ApiClient
from sigaapp.services.session_service import SessionService

logger = logging.getLogger(__name__)

EMPTY_CHAT_RESPONSE = "Respuesta sin contenido"


class ChatService:
    """Asistente de chat: reenvía el mensaje al backend tal cual"""

    def __init__(self, api: ApiClient, session: SessionService):
        self.api = api
        self.session = session

    async def send_message(self, message: str) -> str:
        token = self.session.get_access_token()
        if not token:
            raise SessionError()

        chat_response = await self.api.chat(message, token)
        if chat_response.action and chat_response.action.executed:
            logger.info(f"[Chat] Acción ejecutada por el asistente: {chat_response.action.type}")
        return chat_response.response or chat_response.message or EMPTY_CHAT_RESPONSE
