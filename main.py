"""
OneDrive sample - delete a drive item by ID

Usage:
    python main.py ITEM_ID [--user-email EMAIL]

ONEDRIVE_ACCESS_TOKEN (and optionally ONEDRIVE_USER_EMAIL) are read from the
environment or the project .env file.
"""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from core import StaticTokenProvider
from onedrive_graph import GraphOneDriveClient, OneDriveError, OneDriveSettings

# Load environment variables (프로젝트 루트 기준)
_env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(_env_path, encoding="utf-8-sig")

# Configure logging
logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO'),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete a OneDrive item by ID")
    parser.add_argument("item_id", help="driveItem ID to delete")
    parser.add_argument(
        "--user-email",
        default=None,
        help="account the token belongs to (defaults to ONEDRIVE_USER_EMAIL)",
    )
    return parser.parse_args(argv)


async def delete_item(item_id: str, user_email: str, settings: OneDriveSettings) -> bool:
    """아이템 삭제 - 성공 여부 반환"""
    token_provider = StaticTokenProvider.from_settings(settings)

    async with GraphOneDriveClient(token_provider=token_provider, settings=settings) as client:
        try:
            await client.delete_item(user_email, item_id=item_id)
        except OneDriveError as e:
            logger.error(f"Delete failed: {e}")
            return False

    print(f"Deleted drive item {item_id}")
    return True


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = OneDriveSettings(env_file=_env_path)
    user_email = args.user_email or settings.get("user_email") or "me"

    ok = asyncio.run(delete_item(args.item_id, user_email, settings))
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
