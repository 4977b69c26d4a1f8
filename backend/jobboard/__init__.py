"""Job board API: job postings, applications and their review lifecycle."""
