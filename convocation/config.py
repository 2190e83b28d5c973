import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL", "http://127.0.0.1:54321")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "super-secret-jwt-token")
STUDENTS_TABLE = os.getenv("STUDENTS_TABLE", "students")

EVENT_CODE = os.getenv("EVENT_CODE", "CUK25")
EVENT_TITLE = os.getenv("EVENT_TITLE", "CUK CONVOCATION 2025")
EVENT_SUBTITLE = os.getenv("EVENT_SUBTITLE", "Central University of Kerala")
TICKET_FILE_PREFIX = os.getenv("TICKET_FILE_PREFIX", "CUK_Convocation_Ticket")
TICKET_FOOTER = os.getenv("TICKET_FOOTER", "CUK Convocation Ticket - 2025")

# Square pixel size the QR SVG is rasterized at before embedding
QR_RASTER_SIZE = int(os.getenv("QR_RASTER_SIZE") or 600)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
