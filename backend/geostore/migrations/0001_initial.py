# Generated migration for initial geostore app setup

import django.contrib.gis.db.models.fields
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GeoPoint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.BigIntegerField(unique=True)),
                ('point', django.contrib.gis.db.models.fields.PointField(
                    help_text='PostGIS/SpatiaLite geometry (SRID=4326), x=longitude, y=latitude',
                    srid=4326,
                )),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'user_locations',
            },
        ),
    ]
