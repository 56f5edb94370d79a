"""
FastAPI backend service for statement parsing.
"""
from fastapi import FastAPI, File, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from statement_parser import StatementParser, StatementDecodeError
from statement_parser.core.detectors import get_file_type

app = FastAPI(title="BillBuddy Statement Parser", version="1.0.0")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],  # Vite and other dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "BillBuddy Statement Parser API", "status": "healthy"}


async def _read_upload(file: UploadFile) -> bytes:
    content = await file.read()
    logger.info(f"File info - name: {file.filename}, type: {file.content_type}, size: {len(content)}")

    if not content:
        raise HTTPException(
            status_code=400,
            detail="File unreadable: file is empty - it may be corrupted or not properly uploaded"
        )
    return content


@app.post("/parse")
async def parse_statement_upload(file: UploadFile = File(...)):
    """
    Parse an uploaded CSV or PDF statement.

    Args:
        file: Uploaded statement file

    Returns:
        Parsed statement data as JSON
    """
    content = await _read_upload(file)
    file_type = get_file_type(file.filename or "")

    if file_type == "xlsx":
        raise HTTPException(status_code=501, detail="XLSX parsing not yet implemented")
    if file_type == "unknown":
        raise HTTPException(status_code=400, detail="Unsupported file type")

    if file_type == "pdf" and not content.startswith(PDF_SIGNATURE):
        header = content[:8].decode("ascii", errors="replace")
        raise HTTPException(
            status_code=400,
            detail=f"File unreadable: invalid PDF header. Expected '%PDF-' but got '{header}'"
        )

    parser = StatementParser()
    try:
        if file_type == "csv":
            result = parser.parse_csv(content)
        else:
            result = parser.parse_pdf_file(content)
    except StatementDecodeError as e:
        raise HTTPException(status_code=400, detail=f"File unreadable: {e}")
    except Exception as e:
        logger.error(f"Error parsing statement: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to parse statement: {str(e)}")

    logger.info(f"Successfully parsed {file.filename}: {len(result.transactions)} transactions found")

    return JSONResponse(content={
        "success": True,
        "count": len(result.transactions),
        "data": result.model_dump(by_alias=True)
    })


@app.post("/parse/csv")
async def parse_csv_upload(file: UploadFile = File(...)):
    """Parse a CSV statement and return only its transactions."""
    content = await _read_upload(file)

    try:
        result = StatementParser().parse_csv(content)
    except StatementDecodeError as e:
        raise HTTPException(status_code=400, detail=f"File unreadable: {e}")
    except Exception as e:
        logger.error(f"Error parsing CSV statement: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to parse statement: {str(e)}")

    transactions = [txn.model_dump(by_alias=True) for txn in result.transactions]
    return JSONResponse(content={
        "success": True,
        "count": len(transactions),
        "transactions": transactions
    })


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
