"""CSV export utilities."""
import csv

from django.http import HttpResponse


def rows_to_csv_response(rows, columns, filename):
    """Convert a list of dict rows to a CSV HttpResponse.

    Args:
        rows: iterable of dicts
        columns: list of (key, header_label) tuples, in output order.
        filename: download filename (without extension)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow([col[1] for col in columns])

    for row in rows:
        writer.writerow([
            "" if row.get(key) is None else str(row.get(key))
            for key, _ in columns
        ])

    return response
