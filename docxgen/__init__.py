"""docxgen: generate one docx document per spreadsheet row from a template."""

__version__ = "1.0.0"
