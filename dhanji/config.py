# dhanji/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# Supabase settings
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Display settings
CURRENCY = os.getenv("DHANJI_CURRENCY", "INR")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
