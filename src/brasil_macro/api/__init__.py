"""FastAPI request/response layer over MacroDataService."""
