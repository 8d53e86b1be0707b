"""
데이터베이스 스키마 초기화 스크립트
----------------------------------
shops / likes / ratings / reviews / profiles 테이블과 인덱스를 생성합니다.
"""

import sys
from pathlib import Path

# 환경 변수 로드
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# 패키지 import를 위해 경로 추가
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import inspect

from shop_discovery.db.init_db import init_db
from shop_discovery.db.session import engine


def init_db_schema() -> None:
    """데이터베이스 스키마 초기화."""
    print("🔧 데이터베이스 스키마 초기화 중...")
    init_db(engine)
    print("✅ 테이블 생성 완료")

    print("\n📋 생성된 테이블:")
    inspector = inspect(engine)
    for table_name in sorted(inspector.get_table_names()):
        indexes = ", ".join(ix["name"] for ix in inspector.get_indexes(table_name)) or "-"
        print(f"  - {table_name} (indexes: {indexes})")


if __name__ == "__main__":
    init_db_schema()
