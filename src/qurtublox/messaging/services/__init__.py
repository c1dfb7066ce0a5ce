# Re-export the public service functions so views can use `services.<name>`
from qurtublox.messaging.services.messages import (  # noqa: F401
    create_group,
    delete_group,
    list_groups,
    list_messages,
    resolve_customers,
    send_messages,
    set_read,
)
