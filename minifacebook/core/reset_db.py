from minifacebook.core.config import settings
from minifacebook.core.db import Base, make_engine
import minifacebook.models  # noqa: F401

# 한번만 실행하는 스크립트: python -m minifacebook.core.reset_db
def reset_db(url: str = settings.DATABASE_URL):
    engine = make_engine(url)
    print(f"데이터베이스 초기화 중... ({engine.url.render_as_string(hide_password=True)})")
    Base.metadata.drop_all(bind=engine, checkfirst=True)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    print("초기화 완료!")

if __name__ == "__main__":
    reset_db()
