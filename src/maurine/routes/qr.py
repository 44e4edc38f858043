from litestar import get, MediaType, Response
from litestar.datastructures import State
from litestar.status_codes import HTTP_404_NOT_FOUND


@get("/qr")
async def qr_code(state: State) -> Response:
    """Return the latest pairing QR code for the whatsapp session."""
    qr = state.pairing_session.qr_code
    if qr is None:
        return Response(
            "QR code not available yet.",
            status_code=HTTP_404_NOT_FOUND,
            media_type=MediaType.TEXT,
        )

    return Response({"qrCodeData": qr})
