#!/usr/bin/env python3
"""
AWS Resource Setup Script for the text job service

Creates the two resources the service needs:
- S3 bucket for job results (jobs/{id}.json)
- SQS queue for pending jobs, with 20 second long polling

Prints the environment variables to put in your .env file.

Prerequisites:
- AWS credentials configured (aws configure / aws sso login)
- boto3 installed (pip install boto3)
"""

import argparse
import secrets
import sys

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

DEFAULT_REGION = "us-east-1"
DEFAULT_QUEUE_NAME = "text-jobs"


def generate_bucket_name() -> str:
    """Generate a unique S3 bucket name."""
    return f"text-job-results-{secrets.token_hex(4)}"


def create_s3_bucket(bucket_name: str, region: str = DEFAULT_REGION) -> dict:
    """Create a private S3 bucket for job results."""
    s3 = boto3.client("s3", region_name=region)

    try:
        if region == "us-east-1":
            # us-east-1 doesn't accept a LocationConstraint
            s3.create_bucket(Bucket=bucket_name)
        else:
            s3.create_bucket(
                Bucket=bucket_name,
                CreateBucketConfiguration={"LocationConstraint": region}
            )

        s3.put_public_access_block(
            Bucket=bucket_name,
            PublicAccessBlockConfiguration={
                "BlockPublicAcls": True,
                "IgnorePublicAcls": True,
                "BlockPublicPolicy": True,
                "RestrictPublicBuckets": True,
            }
        )
        print(f"✅ S3 bucket '{bucket_name}' created in {region}")
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "")
        if error_code not in {"BucketAlreadyExists", "BucketAlreadyOwnedByYou"}:
            print(f"❌ Error creating S3 bucket: {e}")
            raise
        print(f"⚠️  Bucket '{bucket_name}' already exists. Using existing bucket.")

    return {"bucket_name": bucket_name, "region": region}


def create_sqs_queue(queue_name: str, region: str = DEFAULT_REGION) -> dict:
    """Create the SQS queue jobs are submitted to."""
    sqs = boto3.client("sqs", region_name=region)

    try:
        response = sqs.create_queue(
            QueueName=queue_name,
            Attributes={
                "VisibilityTimeout": "60",
                "MessageRetentionPeriod": "345600",  # 4 days
                "ReceiveMessageWaitTimeSeconds": "20",
            }
        )
        print(f"✅ SQS queue '{queue_name}' created in {region}")
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "")
        if error_code != "QueueAlreadyExists":
            print(f"❌ Error creating SQS queue: {e}")
            raise
        response = sqs.get_queue_url(QueueName=queue_name)
        print(f"⚠️  Queue '{queue_name}' already exists. Using existing queue.")

    return {"queue_name": queue_name, "queue_url": response["QueueUrl"], "region": region}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the SQS queue and S3 bucket for the job service.")
    parser.add_argument("--region", default=DEFAULT_REGION)
    parser.add_argument("--bucket", help="Bucket name (default: generated)")
    parser.add_argument("--queue", default=DEFAULT_QUEUE_NAME)
    args = parser.parse_args(argv)

    try:
        identity = boto3.client("sts").get_caller_identity()
        print(f"✅ AWS credentials verified ({identity.get('Arn', 'N/A')})\n")
    except NoCredentialsError:
        print("❌ ERROR: AWS credentials not found.")
        print("   Run 'aws configure' first to set up your credentials.")
        sys.exit(1)
    except ClientError as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    bucket_name = args.bucket or generate_bucket_name()
    try:
        bucket_info = create_s3_bucket(bucket_name, args.region)
        queue_info = create_sqs_queue(args.queue, args.region)
    except ClientError as e:
        print(f"❌ Setup failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("📝 Add these to your .env file:\n")
    print(f"AWS_REGION={args.region}")
    print(f"SQS_QUEUE_URL={queue_info['queue_url']}")
    print(f"S3_BUCKET={bucket_info['bucket_name']}")
    print("WORKER_ENABLED=true")
    print("=" * 60)


if __name__ == "__main__":
    main()
