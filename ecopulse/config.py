import os


class Config:
    GEMINI_API_KEY = os.getenv('GEMINI_API_KEY', '')
    NEWS_MODEL = os.getenv('ECOPULSE_NEWS_MODEL', 'gemini-2.5-flash')
    INSIGHT_MODEL = os.getenv('ECOPULSE_INSIGHT_MODEL', 'gemini-2.5-pro')
    OUTPUT_LANGUAGE = os.getenv('ECOPULSE_OUTPUT_LANGUAGE', 'Korean')
    INDEX_REFRESH_SECONDS = float(os.getenv('ECOPULSE_INDEX_REFRESH_SECONDS', '600'))
    LOG_DIR = os.getenv('ECOPULSE_LOG_DIR', 'logs')
    HOST = os.getenv('ECOPULSE_HOST', '0.0.0.0')
    PORT = int(os.getenv('ECOPULSE_PORT', '8000'))

config = Config()
