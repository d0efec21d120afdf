"""ATS workflow engine - application, interview and offer workflows."""
