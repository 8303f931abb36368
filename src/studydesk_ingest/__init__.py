"""StudyDesk document ingestion: text extraction for uploaded study material."""
