"""Initialize database (create tables). Run: python backend/init_db.py"""
from charity.database import engine, Base
from charity import models, campaign_models, donation_models  # noqa: F401


def init():
    Base.metadata.create_all(bind=engine)


if __name__ == '__main__':
    print('Initializing DB...')
    init()
    print('DB initialized.')
