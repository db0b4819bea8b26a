import argparse
import asyncio
import logging

from slash_search.config import settings
from slash_search.host.browser import BrowserSession


async def run(url: str, via_keyboard: bool) -> None:
    async with BrowserSession() as session:
        await session.goto(url)
        if via_keyboard:
            before = await session.describe_active_element()
            await session.attach_shortcut()
            await session.press_shortcut()
            # The binding answers asynchronously.
            await session.page.wait_for_timeout(500)
            active = await session.describe_active_element()
            focused = active != before
        else:
            focused = await session.focus_search()
            active = await session.describe_active_element()
        print(f"url={url} focused={focused} active={active}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--url", required=True, help="Page to open")
    parser.add_argument(
        "--via-keyboard",
        action="store_true",
        help="Install the '/' listener and press the key instead of calling the engine directly",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    asyncio.run(run(args.url, args.via_keyboard))


if __name__ == "__main__":
    main()
