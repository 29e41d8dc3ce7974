"""Document store: structured objects and attachments on wiki documents.

Layout of the file-backed store:
    ~/.sysprops/store/
    ├── xwiki/                               # one directory per wiki
    │   └── XWiki/
    │       ├── XWikiPreferences.md          # YAML frontmatter: objects, version, history
    │       └── XWikiPreferences.attachments/
    │           └── logo.png
    └── .versions/                           # previous revisions (10 per document)
"""
