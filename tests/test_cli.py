"""Tests for the console and the viewer/export commands."""

import pandas as pd

from posledger.model import CATALOG

PEN_SET = str(len(CATALOG))  # last entry in the product menu


def run_console(runner, *answers):
    return runner.invoke(args=["console"], input="\n".join(answers) + "\n")


class TestConsole:
    def test_exit(self, runner):
        result = run_console(runner, "4")

        assert result.exit_code == 0
        assert "=== Menu-Driven Payment Console ===" in result.output
        assert "Thank you for using the Payment Console!" in result.output

    def test_invalid_choice(self, runner):
        result = run_console(runner, "9", "4")

        assert "Invalid choice. Please try again." in result.output

    def test_cash_sale(self, runner, app):
        result = run_console(runner, "1", PEN_SET, "2", "n", "1", "20", "4")

        assert result.exit_code == 0
        assert "Added: 2 x Pen Set = $11.98" in result.output
        assert "Change due: $7.00" in result.output
        assert "Transaction completed successfully!" in result.output
        tx = app.extensions["posledger"]["store"].get(1)
        assert str(tx.total_due) == "13.00"

    def test_card_sale(self, runner, app):
        result = run_console(runner, "1", PEN_SET, "1", "n", "2", "4242", "Ada Lovelace", "12/27", "4")

        assert "Card payment processed successfully!" in result.output
        tx = app.extensions["posledger"]["store"].get(1)
        assert tx.card_number_masked == "****-****-****-4242"
        assert tx.card_holder_name == "Ada Lovelace"

    def test_insufficient_cash(self, runner, app):
        result = run_console(runner, "1", PEN_SET, "1", "n", "cash", "1", "4")

        assert "Insufficient payment. Transaction cancelled." in result.output
        assert app.extensions["posledger"]["store"].load_all() == []

    def test_invalid_card(self, runner, app):
        result = run_console(runner, "1", PEN_SET, "1", "n", "card", "42", "4")

        assert "Invalid card number format. Transaction cancelled." in result.output
        assert app.extensions["posledger"]["store"].load_all() == []

    def test_bad_product_and_quantity_reprompt(self, runner):
        result = run_console(runner, "1", "99", PEN_SET, "0", PEN_SET, "1", "n", "1", "10", "4")

        assert "Invalid product selection." in result.output
        assert "Quantity must be positive." in result.output
        assert "Transaction completed successfully!" in result.output

    def test_view_transactions_and_summary(self, runner):
        run_console(runner, "1", PEN_SET, "2", "n", "1", "20", "4")

        result = run_console(runner, "2", "3", "4")

        assert "--- ALL TRANSACTIONS ---" in result.output
        assert "Total transactions: 1" in result.output
        assert "Total Sales: $13.00" in result.output
        assert "Cash Transactions: 1 (100.0%) - $13.00" in result.output


class TestViewerCommands:
    def test_transactions_empty(self, runner):
        result = runner.invoke(args=["transactions"])

        assert result.exit_code == 0
        assert "No transactions found." in result.output

    def test_summary(self, runner, client):
        client.post(
            "/api/checkout",
            data='{"items":[{"name":"Cap","price":11.99,"quantity":1}],"paymentMethod":"CARD","cardLast4":"1111"}',
        )

        result = runner.invoke(args=["summary"])

        assert "Total Transactions: 1" in result.output
        assert "Card Transactions: 1 (100.0%) - $13.01" in result.output


class TestExport:
    def test_export_csv(self, runner, client, tmp_path):
        client.post(
            "/api/checkout",
            data='{"items":[{"name":"Cap","price":11.99,"quantity":1},'
                 '{"name":"Pen Set","price":5.99,"quantity":2}],"paymentMethod":"CASH"}',
        )
        path = tmp_path / "out" / "transactions.csv"

        result = runner.invoke(args=["export-transactions", str(path)])

        assert result.exit_code == 0
        assert "2 rows have been exported" in result.output
        df = pd.read_csv(path)
        assert list(df["Item"]) == ["Cap", "Pen Set"]
        assert list(df["Transaction ID"]) == [1, 1]

    def test_export_xlsx(self, runner, client, tmp_path):
        client.post(
            "/api/checkout",
            data='{"items":[{"name":"Cap","price":11.99,"quantity":1}],"paymentMethod":"CARD"}',
        )
        path = tmp_path / "transactions.xlsx"

        runner.invoke(args=["export-transactions", str(path)])

        df = pd.read_excel(path)
        assert df.loc[0, "Method"] == "CARD"
        assert df.loc[0, "Card"] == "****-****-****-0000"
