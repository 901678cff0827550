"""hostwhitelist models package.

Defines the shared data contracts used by the resolver and the store backends:

  - record.py  — WhitelistRecord, MalformedRecord, WhitelistError
  - subject.py — Subject protocol, NodeSubject
"""
