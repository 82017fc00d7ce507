"""
Basic usage example for logship.

Ships a handful of pino-style records to Coralogix and drains on exit.
Set LOGSHIP_API_KEY before running; the other identifiers are passed
explicitly below.
"""

import asyncio
import time

from logship import ConfigurationError, DeliveryError, build_transport


def report(error: DeliveryError) -> None:
    print(f"delivery failed: {error}")


async def main() -> None:
    """Demonstrate basic logship usage."""
    try:
        transport = build_transport(
            domain="eu1",
            application_name="example-app",
            subsystem_name="basic-usage",
            batch_size=50,
            flush_interval_seconds=2.0,
            on_error=report,
        )
    except ConfigurationError as e:
        print(f"configuration error: {e}")
        return

    async with transport:
        # Records use pino's shape: numeric level, epoch millis, message
        await transport.write(
            {"level": 30, "time": int(time.time() * 1000), "msg": "Application started"}
        )
        for level, text in ((20, "Debug message"), (40, "Warning"), (50, "Error")):
            await transport.write(
                {
                    "level": level,
                    "time": int(time.time() * 1000),
                    "msg": text,
                    "category": "example",
                }
            )

        # NDJSON lines are accepted as well
        await transport.write('{"level": 30, "msg": {"event": "login", "user": 42}}')


if __name__ == "__main__":
    asyncio.run(main())
