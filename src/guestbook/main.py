import logging
import random
from typing import Optional

import uvicorn
from fasthtml.common import fast_app
from monsterui.all import Theme

from .adapters.fasthtml import configure_app
from .app.context import AppContext
from .config import AppConfig, setup_logging
from .core import datastar_script
from .entities import GuestBook, GuestComponent
from .persistence import GuestStore
from .pages import routers

logger = logging.getLogger(__name__)

monsterui_headers = Theme.violet.headers()


def create_app(config: Optional[AppConfig] = None, *,
               store: Optional[GuestStore] = None,
               rng: Optional[random.Random] = None):
    """Build the FastHTML app. Each call gets its own store, view registry and sessions."""
    config = config or AppConfig.from_environment()
    setup_logging(config.logging)
    context = AppContext.create(config, store=store, rng=rng)

    async def lifespan(app):
        context.views.configure_cleanup(True, config.guestbook.cleanup_interval)
        context.views.start_cleanup()
        logger.info(f"Guest book ready on port {config.web.port} ({config.environment.value})")
        try:
            yield
        finally:
            context.sessions.close_all()
            context.views.stop_cleanup()
            logger.info("Guest book stopped")

    app, rt = fast_app(
        pico=False,
        htmx=False,
        live=False,
        debug=config.debug,
        secret_key=config.secret_key,
        session_cookie=config.security.session_cookie,
        hdrs=(monsterui_headers, datastar_script),
        htmlkw=dict(cls="bg-background font-sans antialiased"),
        lifespan=lifespan,
    )

    configure_app(app, rt, context, [GuestBook, GuestComponent])
    for router in routers:
        router.to_app(app)
    return app


def main():
    config = AppConfig.from_environment()
    print("\n" + "=" * 60)
    print(f"📖 Guest Book starting on http://{config.web.host}:{config.web.port}")
    print("=" * 60)
    uvicorn.run("guestbook.main:create_app",
                factory=True,
                host=config.web.host,
                port=config.web.port,
                reload=config.web.auto_reload,
                log_level=config.logging.level.lower())


if __name__ == "__main__":
    main()
