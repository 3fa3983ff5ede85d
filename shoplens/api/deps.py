# shoplens/api/deps.py
from fastapi import Depends
from shoplens.core.config import Settings, get_settings
from shoplens.db.mongo import get_db
from shoplens.db.redis import get_redis

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

# Redis client or None (cache disabled)
def redis_dep():
    return get_redis()

def settings_dep() -> Settings:
    return get_settings()
