"""Reading and writing package resource index (PRI) files."""