import asyncio
import logging
from contextlib import asynccontextmanager

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from skillswap.config import Config, load_config
from skillswap.core.errors import MessagingError
from skillswap.providers.dishka_app import AdaptersProvider, GatewaysProvider, MessagingProvider, ServicesProvider

from skillswap.services import AuthAPI, RequestAPI, ConversationAPI, MessageAPI, NotificationAPI

logger = logging.getLogger("skillswap")

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()

async def messaging_error_handler(request: Request, exc: MessagingError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )

def make_container() -> AsyncContainer:
    return make_async_container(
        AdaptersProvider(),
        GatewaysProvider(),
        MessagingProvider(),
        ServicesProvider(),
    )

async def create_app(container: AsyncContainer | None = None) -> FastAPI:
    container = container or make_container()

    app = FastAPI(title="SkillSwap Messaging API", lifespan=lifespan)
    setup_dishka(container, app)
    app.add_exception_handler(MessagingError, messaging_error_handler)

    auth_api = await container.get(AuthAPI)
    request_api = await container.get(RequestAPI)
    conversation_api = await container.get(ConversationAPI)
    message_api = await container.get(MessageAPI)
    notification_api = await container.get(NotificationAPI)

    app.include_router(auth_api.get_router())
    app.include_router(request_api.get_router())
    app.include_router(conversation_api.get_router())
    app.include_router(message_api.get_router())
    app.include_router(notification_api.get_router())

    return app

def main():
    config: Config = load_config(".env")
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app = asyncio.run(create_app())
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=config.log_level.lower())

if __name__ == "__main__":
    main()
