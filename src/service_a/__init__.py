"""service-a: calls service-b with a Cloud Run identity token."""
