from unittest.mock import MagicMock, patch


class TestSelectConsumer:
    @patch("meterbill.cli.consumer_menu.questionary")
    def test_no_consumers(self, mock_q, services):
        from meterbill.cli.consumer_menu import select_consumer

        assert select_consumer(services.consumers) is None
        mock_q.select.assert_not_called()

    @patch("meterbill.cli.consumer_menu.questionary")
    def test_pick(self, mock_q, services):
        from meterbill.cli.consumer_menu import select_consumer

        consumer = services.consumers.add_consumer("Aman Sharma")
        mock_q.select.return_value.ask.return_value = f"{consumer.id} - Aman Sharma"
        assert select_consumer(services.consumers) == consumer

    @patch("meterbill.cli.consumer_menu.questionary")
    def test_back(self, mock_q, services):
        from meterbill.cli.consumer_menu import select_consumer

        services.consumers.add_consumer("Aman Sharma")
        mock_q.select.return_value.ask.return_value = "Back"
        assert select_consumer(services.consumers) is None


class TestAddConsumerMenu:
    @patch("meterbill.cli.consumer_menu.questionary")
    def test_add(self, mock_q, services):
        from meterbill.cli.consumer_menu import add_consumer_menu

        mock_q.text.return_value.ask.side_effect = ["Aman Sharma", "Mumbai", "9876500001", "MTR-1001"]

        add_consumer_menu(services.consumers)

        [consumer] = services.consumers.list_consumers()
        assert consumer.name == "Aman Sharma"
        assert consumer.meter_number == "MTR-1001"

    @patch("meterbill.cli.consumer_menu.questionary")
    def test_cancel_on_empty_name(self, mock_q):
        from meterbill.cli.consumer_menu import add_consumer_menu

        service = MagicMock()
        mock_q.text.return_value.ask.return_value = ""
        add_consumer_menu(service)
        service.add_consumer.assert_not_called()


class TestUpdateConsumerMenu:
    @patch("meterbill.cli.consumer_menu.questionary")
    def test_blank_keeps_values(self, mock_q, services):
        from meterbill.cli.consumer_menu import update_consumer_menu

        consumer = services.consumers.add_consumer("Aman Sharma", "Mumbai", "111")
        mock_q.select.return_value.ask.return_value = f"{consumer.id} - Aman Sharma"
        mock_q.text.return_value.ask.side_effect = ["", "Pune", "", ""]

        update_consumer_menu(services.consumers)

        stored = services.consumers.get_consumer(consumer.id)
        assert stored.name == "Aman Sharma"
        assert stored.address == "Pune"
        assert stored.phone == "111"


class TestDeleteConsumerMenu:
    @patch("meterbill.cli.consumer_menu.questionary")
    def test_confirmed(self, mock_q, services):
        from meterbill.cli.consumer_menu import delete_consumer_menu

        consumer = services.consumers.add_consumer("Aman Sharma")
        mock_q.select.return_value.ask.return_value = f"{consumer.id} - Aman Sharma"
        mock_q.confirm.return_value.ask.return_value = True

        delete_consumer_menu(services.consumers)
        assert services.consumers.list_consumers() == []

    @patch("meterbill.cli.consumer_menu.questionary")
    def test_refused_with_bills(self, mock_q, services):
        from meterbill.cli.consumer_menu import delete_consumer_menu

        consumer = services.consumers.add_consumer("Aman Sharma")
        services.readings.record_reading(consumer.id, 1000, "2025-07-31 23:00")
        services.readings.record_reading(consumer.id, 1200, "2025-09-01 01:00")
        services.bills.generate(consumer.id, "2025-08")
        mock_q.select.return_value.ask.return_value = f"{consumer.id} - Aman Sharma"
        mock_q.confirm.return_value.ask.return_value = True

        delete_consumer_menu(services.consumers)
        assert len(services.consumers.list_consumers()) == 1


class TestConsumersMenu:
    @patch("meterbill.cli.consumer_menu.list_consumers_menu")
    @patch("meterbill.cli.consumer_menu.questionary")
    def test_dispatch_then_back(self, mock_q, mock_list):
        from meterbill.cli.consumer_menu import consumers_menu

        mock_q.select.return_value.ask.side_effect = ["List Consumers", "Back"]
        consumers_menu(MagicMock())
        mock_list.assert_called_once()

    def test_list_renders(self, services):
        from meterbill.cli.consumer_menu import list_consumers_menu

        services.consumers.add_consumer("Aman Sharma")
        list_consumers_menu(services.consumers)
