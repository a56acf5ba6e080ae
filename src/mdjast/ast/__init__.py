"""Document parsing: frontmatter, tag literals and Markdown."""
