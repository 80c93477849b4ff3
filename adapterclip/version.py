version_number = "1.0.0"
