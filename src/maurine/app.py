from litestar import Litestar
from litestar.config.cors import CORSConfig
from maurine.lifespan import lifespan
from maurine.routes.qr import qr_code
from maurine.routes.webhook import (
    handle_whatsapp_message,
    handle_whatsapp_qr,
    handle_whatsapp_ready,
)
from maurine.logging_setup import (
    CorrelationMiddleware,
    correlation_id_contextvar,
    create_logging_config,
)


app = Litestar(
    route_handlers=[
        qr_code,
        handle_whatsapp_qr,
        handle_whatsapp_ready,
        handle_whatsapp_message,
    ],
    lifespan=[lifespan],
    logging_config=create_logging_config(),
    middleware=[CorrelationMiddleware(correlation_id_contextvar)],
    cors_config=CORSConfig(allow_origins=["*"]),
)
