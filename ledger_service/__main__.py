import uvicorn

from .config import SERVER_HOST, SERVER_PORT

if __name__ == "__main__":
    uvicorn.run("ledger_service.main:app", host=SERVER_HOST, port=SERVER_PORT, reload=False)
