"""
Route Python's standard ``logging`` into Coralogix.

Existing code keeps calling ``logging.getLogger(...)``; the bridge converts
each record and the transport batches it.
"""

import asyncio
import logging

from logship import build_transport, disable_stdlib_bridge, enable_stdlib_bridge


async def main() -> None:
    transport = build_transport(
        domain="us1",
        application_name="example-app",
        subsystem_name="stdlib-bridge",
    )
    handler = enable_stdlib_bridge(transport, level=logging.INFO)
    log = logging.getLogger("example.orders")

    try:
        log.info("order %s placed", "A-1001")
        log.warning("inventory low", extra={"category": "inventory"})
        try:
            1 / 0
        except ZeroDivisionError:
            log.exception("pricing failed")
        await asyncio.sleep(0)
    finally:
        disable_stdlib_bridge(handler)
        await transport.close()


if __name__ == "__main__":
    asyncio.run(main())
