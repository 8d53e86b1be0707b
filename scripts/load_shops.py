"""
가게 데이터 일괄 적재 스크립트
----------------------------
shops.jsonl (한 줄에 ShopSubmission 하나)을 읽어 enrichment 후 DB에 저장합니다.

사용법:
  python scripts/load_shops.py --file shops.jsonl --user-id <owner id>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from shop_discovery.core.config import settings
from shop_discovery.db.session import SessionLocal
from shop_discovery.services.enrichment import EnrichmentOrchestrator
from shop_discovery.services.geocoder import Geocoder
from shop_discovery.services.google_maps import GoogleMapsClient
from shop_discovery.services.importer import import_shops, iter_jsonl
from shop_discovery.services.place_details import PlaceDetailCache
from shop_discovery.services.station import NearestStationResolver


async def run(path: Path, user_id: str) -> tuple[int, int, int]:
    client = GoogleMapsClient.from_settings(settings)
    db = SessionLocal()
    try:
        orchestrator = EnrichmentOrchestrator(
            Geocoder(client),
            PlaceDetailCache(db, client),
            NearestStationResolver(client),
        )
        return await import_shops(db, orchestrator, iter_jsonl(path), user_id)
    finally:
        db.close()
        await client.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="shops.jsonl → enrichment → PostgreSQL 적재")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path("shops.jsonl"),
        help="가게 JSONL 파일 경로 (기본: ./shops.jsonl)",
    )
    parser.add_argument("--user-id", required=True, help="등록자로 기록할 사용자 ID")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(message)s")

    if not args.file.exists():
        raise SystemExit(f"파일을 찾을 수 없습니다: {args.file}")

    print(f"📖 {args.file}에서 가게 데이터 로드 중...")
    success, skipped, failed = asyncio.run(run(args.file, args.user_id))

    print("\n" + "=" * 60)
    print("가게 적재 완료")
    print("=" * 60)
    print(f"  성공: {success}개")
    print(f"  건너뜀: {skipped}개")
    print(f"  실패: {failed}개")
    print("=" * 60)


if __name__ == "__main__":
    main()
