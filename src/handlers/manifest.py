"""Handler units served by this API, in registration order."""

from handlers.items import ItemsController

HANDLER_UNITS = (
    ItemsController,
)
