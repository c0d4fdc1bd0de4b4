# Document storage for the file-backed note store
