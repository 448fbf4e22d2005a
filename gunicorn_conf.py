import os

# Sessions, audio buffers and sockets live in process memory: one worker only.
bind = f"0.0.0.0:{os.getenv('PORT', '3001')}"
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
keepalive = 120
# Long enough for a diarization round trip on the upload path
timeout = 180
loglevel = "info"
accesslog = "-"
errorlog = "-"
