"""Protean Engine runner for the checkout domain.

Only needed when events are processed asynchronously (``PROTEAN_ENV=production``):
the engine delivers OrderPlaced, OrderStatusChanged and RatingRecorded events
to the projectors that maintain the read models.

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import asyncio

from protean.server.engine import Engine


async def run():
    from checkout.domain import checkout

    checkout.init()
    await Engine(checkout).run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
