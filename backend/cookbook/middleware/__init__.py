# Middleware package init
"""
Family Cookbook Backend — Middleware Package
==============================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [Upload Size Limit] → [GZip] → [CORS] → Route

    1. Request ID first, so every later log line and error body can carry it
    2. Logging wraps everything below it, including 413 rejections
    3. Upload size limit answers 413 on a large Content-Length and stops a
       streamed body once it passes the cap
"""
