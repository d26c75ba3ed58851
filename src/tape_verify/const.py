ERRORS = {
  "E_NOT_PNG": "File does not start with the PNG signature",
  "E_TRUNCATED": "Chunk stream ends before IEND",
  "E_CRC_MISMATCH": "Chunk CRC does not match its contents",
  "E_NO_IEND": "Carrier has no IEND chunk",
  "E_NO_PAYLOAD": "No tape chunk found",
  "E_PAYLOAD_JSON": "Tape chunk is not valid UTF-8 JSON",
  "E_ENVELOPE": "Tape payload is not a valid session envelope",
}

# Evidence row statuses
STATUS_VERIFIED = "VERIFIED"
STATUS_CRC_MISMATCH = "CRC_MISMATCH"
