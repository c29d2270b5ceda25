"""
Unit tests for HealthChecker and the built-in checks.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError
from pymongo.errors import ServerSelectionTimeoutError

from blog_engine.config import BlogConfig
from blog_engine.database import ConnectionManager
from blog_engine.exceptions import ConnectionRetryError
from blog_engine.observability import (
    HealthChecker,
    build_health_checker,
    check_database,
    check_environment,
    check_object_storage,
    check_system,
    get_metrics_collector,
)


async def passing():
    return None


async def failing():
    raise RuntimeError("S3 bucket unreachable")


class TestHealthChecker:
    @pytest.mark.asyncio
    async def test_all_checks_pass(self):
        checker = HealthChecker(environment="production")
        checker.add_check("one", passing)
        checker.add_check("two", passing)

        report = await checker.run_checks()

        assert report["status"] == "healthy"
        assert report["environment"] == "production"
        assert "timestamp" in report
        assert report["checks"]["one"]["status"] == "pass"
        assert report["checks"]["one"]["duration"].endswith("ms")

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_checks(self):
        after = AsyncMock()
        checker = HealthChecker()
        checker.add_check("first", passing)
        checker.add_check("s3", failing)
        checker.add_check("last", after)

        report = await checker.run_checks()

        assert report["status"] == "unhealthy"
        assert report["checks"]["first"]["status"] == "pass"
        assert report["checks"]["s3"]["status"] == "fail"
        assert report["checks"]["s3"]["error"] == "S3 bucket unreachable"
        assert "RuntimeError" in report["checks"]["s3"]["details"]
        assert report["checks"]["last"]["status"] == "pass"
        after.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_checks_run_in_registration_order(self):
        order = []

        def track(name):
            async def check():
                order.append(name)

            return check

        checker = HealthChecker()
        for name in ("c", "a", "b"):
            checker.add_check(name, track(name))

        report = await checker.run_checks()

        assert order == ["c", "a", "b"]
        assert list(report["checks"]) == ["c", "a", "b"]
        assert checker.check_names == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_no_checks_is_healthy(self):
        report = await HealthChecker().run_checks()
        assert report["status"] == "healthy"
        assert report["checks"] == {}

    @pytest.mark.asyncio
    async def test_records_metrics(self):
        checker = HealthChecker()
        checker.add_check("ok", passing)
        checker.add_check("bad", failing)

        await checker.run_checks()

        collector = get_metrics_collector()
        assert collector.get_operation_count("health.check") == 2
        metrics = collector.get_metrics("health.check")["metrics"]
        assert metrics["health.check[check=bad]"]["error_count"] == 1


class TestCheckEnvironment:
    @pytest.mark.asyncio
    async def test_complete_configuration(self, blog_config):
        await check_environment(blog_config)

    @pytest.mark.asyncio
    async def test_missing_variables_are_listed(self, blog_config):
        blog_config.aws_region = ""
        blog_config.s3_bucket_name = ""

        with pytest.raises(RuntimeError) as exc_info:
            await check_environment(blog_config)

        assert str(exc_info.value) == (
            "Missing required environment variables: S3_BUCKET_NAME, AWS_REGION"
        )

    @pytest.mark.asyncio
    async def test_short_jwt_secret(self, blog_config):
        blog_config.jwt_secret = "short"

        with pytest.raises(RuntimeError, match="at least 32 characters"):
            await check_environment(blog_config)


class TestCheckDatabase:
    @pytest.mark.asyncio
    async def test_connects_when_needed(self):
        manager = MagicMock()
        manager.is_connected.return_value = False
        manager.connect = AsyncMock()
        manager.ping = AsyncMock()

        await check_database(manager)

        manager.connect.assert_awaited_once_with(max_retries=0)
        manager.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_already_connected(self):
        manager = MagicMock()
        manager.is_connected.return_value = True
        manager.connect = AsyncMock()
        manager.ping = AsyncMock()

        await check_database(manager)

        manager.connect.assert_not_awaited()
        manager.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreachable_database_is_tried_once(self, mock_mongo_client):
        """Test that a health check does not go through the startup retry loop."""
        mock_mongo_client.admin.command = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        manager = ConnectionManager(mongo_uri="mongodb://localhost:27017")

        with (
            patch(
                "blog_engine.database.connection.AsyncIOMotorClient",
                return_value=mock_mongo_client,
            ),
            patch("blog_engine.database.connection.asyncio.sleep", new=AsyncMock()) as sleep,
        ):
            with pytest.raises(ConnectionRetryError) as exc_info:
                await check_database(manager)

        assert exc_info.value.attempts == 1
        assert mock_mongo_client.admin.command.await_count == 1
        sleep.assert_not_awaited()
        assert manager.max_retries == 5


class TestCheckObjectStorage:
    @pytest.mark.asyncio
    async def test_head_bucket(self, blog_config):
        s3_client = MagicMock()

        with patch("blog_engine.observability.health.boto3.Session") as session_cls:
            session_cls.return_value.client.return_value = s3_client
            await check_object_storage(blog_config)

        session_cls.assert_called_once_with(
            aws_access_key_id="AKIATEST",
            aws_secret_access_key="secret",
            region_name="us-east-1",
        )
        session_cls.return_value.client.assert_called_once_with("s3")
        s3_client.head_bucket.assert_called_once_with(Bucket="test-bucket")

    @pytest.mark.asyncio
    async def test_missing_bucket_fails(self, blog_config):
        s3_client = MagicMock()
        s3_client.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket"
        )

        with patch("blog_engine.observability.health.boto3.Session") as session_cls:
            session_cls.return_value.client.return_value = s3_client
            with pytest.raises(ClientError):
                await check_object_storage(blog_config)


class TestCheckSystem:
    @pytest.mark.asyncio
    async def test_memory_below_limit(self):
        with patch("blog_engine.observability.health.psutil.Process") as process_cls:
            process_cls.return_value.memory_info.return_value.rss = 100 * 1024 * 1024
            process_cls.return_value.create_time.return_value = 0

            info = await check_system()

        assert info["memory"] == "100MB"

    @pytest.mark.asyncio
    async def test_high_memory(self):
        with patch("blog_engine.observability.health.psutil.Process") as process_cls:
            process_cls.return_value.memory_info.return_value.rss = 2048 * 1024 * 1024

            with pytest.raises(RuntimeError, match="High memory usage: 2048MB"):
                await check_system()


class TestBuildHealthChecker:
    def test_standard_checks(self, blog_config):
        checker = build_health_checker(blog_config, MagicMock())

        assert checker.check_names == ["environment", "database", "s3", "system"]
        assert checker.environment == "test"

    @pytest.mark.asyncio
    async def test_unreachable_database_reports_unhealthy(self):
        config = BlogConfig(
            mongodb_uri="mongodb://localhost:27017",
            jwt_secret="j" * 32,
            aws_access_key_id="a",
            aws_secret_access_key="b",
            aws_region="us-east-1",
            s3_bucket_name="bucket",
            environment="production",
        )
        manager = MagicMock()
        manager.is_connected.return_value = False
        manager.connect = AsyncMock(side_effect=RuntimeError("connection refused"))

        with (
            patch("blog_engine.observability.health.boto3.Session"),
            patch("blog_engine.observability.health.psutil.Process") as process_cls,
        ):
            process_cls.return_value.memory_info.return_value.rss = 1024
            process_cls.return_value.create_time.return_value = 0
            report = await build_health_checker(config, manager).run_checks()

        assert report["status"] == "unhealthy"
        assert report["checks"]["environment"]["status"] == "pass"
        assert report["checks"]["database"]["error"] == "connection refused"
        assert report["checks"]["s3"]["status"] == "pass"
        assert report["checks"]["system"]["status"] == "pass"
