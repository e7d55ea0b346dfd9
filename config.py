import os

from dotenv import load_dotenv
load_dotenv()

# ---------- ENV ----------
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME") or "Chain_db"
CHAIN_DATA_DIR = os.getenv("CHAIN_DATA_DIR")
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "5000"))

SERVICE_NAME = "chain-api"
