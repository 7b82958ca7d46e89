"""
Static catalog and simulation constants
"""

from .types import Server

APP_NAME = "ShieldFlow VPN"
GEMINI_MODEL = "gemini-3-flash-preview"

CONNECT_DELAY = 2.0
DISCONNECT_DELAY = 1.5
TICK_INTERVAL = 1.0

TRAFFIC_WINDOW = 20
DOWNLOAD_RANGE = (20.0, 100.0)  # Mbps
UPLOAD_RANGE = (5.0, 35.0)  # Mbps

LOG_CAPACITY = 50

DEFAULT_SERVER_ID = 'us-east-1'
FALLBACK_REASON = "service unavailable"

PRESET_QUERIES = [
    'Watch Netflix US',
    'Low ping gaming',
    'Maximum Privacy',
    'P2P File Sharing',
]

MOCK_SERVERS = [
    Server(
        id='us-east-1', country='United States', city='New York',
        flag='🇺🇸', ping=45, load=62, ip='104.23.11.90', premium=False,
        features=('Streaming', 'P2P'),
    ),
    Server(
        id='uk-lon-1', country='United Kingdom', city='London',
        flag='🇬🇧', ping=89, load=45, ip='185.20.12.4', premium=True,
        features=('BBC iPlayer', 'Security'),
    ),
    Server(
        id='de-fra-1', country='Germany', city='Frankfurt',
        flag='🇩🇪', ping=102, load=30, ip='190.12.44.11', premium=False,
        features=('Privacy', 'No-Log'),
    ),
    Server(
        id='sg-sin-1', country='Singapore', city='Singapore',
        flag='🇸🇬', ping=210, load=15, ip='120.33.1.55', premium=True,
        features=('Gaming', 'Low Latency'),
    ),
    Server(
        id='in-mum-1', country='India', city='Mumbai',
        flag='🇮🇳', ping=250, load=78, ip='103.11.20.1', premium=False,
        features=('Virtual Location',),
    ),
    Server(
        id='jp-tok-1', country='Japan', city='Tokyo',
        flag='🇯🇵', ping=180, load=40, ip='45.12.99.10', premium=True,
        features=('Anime', 'Streaming'),
    ),
]
