# Generated migration for initial businesses app setup

import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('locations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('business_type', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('rating', models.FloatField(
                    default=0.0,
                    help_text='Rating from 0.0 to 5.0',
                    validators=[
                        django.core.validators.MinValueValidator(0.0),
                        django.core.validators.MaxValueValidator(5.0),
                    ],
                )),
                ('cluster_id', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='businesses', to='locations.location')),
            ],
            options={
                'db_table': 'businesses_business',
                'verbose_name_plural': 'businesses',
            },
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='businesses.business')),
            ],
            options={
                'db_table': 'businesses_event',
            },
        ),
        migrations.CreateModel(
            name='BusinessLike',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='likes', to='businesses.business')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='business_likes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'businesses_like',
                'unique_together': {('user', 'business')},
            },
        ),
        migrations.AddIndex(
            model_name='business',
            index=models.Index(fields=['cluster_id', '-rating'], name='business_cluster_rating_idx'),
        ),
        migrations.AddIndex(
            model_name='event',
            index=models.Index(fields=['business', 'end_time'], name='event_business_end_idx'),
        ),
    ]
