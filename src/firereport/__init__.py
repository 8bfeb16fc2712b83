"""Fire incident report form with live paper preview."""
