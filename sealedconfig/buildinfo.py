"""
Build-time secret for the key file.

`KEY_FILE_PASSWORD` protects the key file that holds the configuration passphrase.
It is left empty in source control and filled in by the packaging step
(`python cli.py stamp <secret>`) before a deployment is built. While it is empty,
every entry point of the store fails with `MissingBuildSecret`.
"""
# sealedconfig/buildinfo.py

KEY_FILE_PASSWORD = ""
